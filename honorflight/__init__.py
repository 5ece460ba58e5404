"""
Honorflight - Flight allocation core for veteran and guardian travel.

This package contains:
- store: CouchDB session cache, resilient client, and document/view API
- models: Participant documents, audit history, flight assignment views
- validation: Structural validation gate
- services: Aggregation, waitlist allocation, and pairing synchronization
"""
