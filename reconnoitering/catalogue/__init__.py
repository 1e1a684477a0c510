"""
Exhibition, venue, artist and tag catalogue.

Responsibilities:
- Validate admin payloads for exhibitions, venues, artists and tags.
- Keep exhibition locations in step with their venue.
- Serve the public venue listing, venue pages and tag counts.
- Summarise the catalogue for the admin dashboard.
"""
