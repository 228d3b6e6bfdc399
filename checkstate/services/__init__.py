# Services package init
"""
Checkstate: Services Layer
============================

Service Inventory:
    - CheckStore: marker-file presence store for checkbox state
"""
