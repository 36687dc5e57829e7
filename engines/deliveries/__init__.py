"""
GATE Deliveries Engine
========================
Pre-authorized deliveries: authorize → (delivered | failed | cancelled).
"""
