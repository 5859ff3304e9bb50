"""
Image groups: located galleries of images. Also home of the Image table,
which is shared with markers (each image has exactly one owner).
"""
