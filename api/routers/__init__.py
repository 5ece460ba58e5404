"""
API Routers - Organized endpoint handlers for the Honor Flight API.

Each router handles a specific domain:
- flight_assignments: Flight roster, seat/bus detail, and waitlist allocation
- guardians: Guardian update with pairing synchronization
- waitlist: Waitlist listings and veteran groups
"""
