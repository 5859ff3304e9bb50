"""
Geotagged points of interest on the affected-area map, with owned images.
"""
