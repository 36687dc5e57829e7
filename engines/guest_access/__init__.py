"""
GATE Guest Access Engine
==========================
Time-bound guest credentials (PIN / QR): issue, consume, revoke.
"""
