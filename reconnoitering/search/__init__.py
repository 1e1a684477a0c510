"""
Exhibition query layer.

Responsibilities:
- Translate request parameters into store filters (city, country, date
  window, category, artist, tag, free text).
- Apply sort order and the limit/skip window.
- Compute facets: filter options, distance to a point, preference scores.
- Package results and metadata into the response envelope.
"""
