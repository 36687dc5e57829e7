"""
GATE Access Log Engine
========================
Read model of every credential consumption attempt at the gate.
Fed by guest_access events; never written to directly.
"""
