"""
External collaborators of the AMM core: the in-memory token program
(`token_program`) and the authorization gate (`authorization`).
"""
