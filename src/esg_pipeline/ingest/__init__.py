"""Raw-layer submission sources.

Repositories return snapshots of raw ESG submissions from the local JSON
store, the data API, or MongoDB behind one small protocol.
"""
