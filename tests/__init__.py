"""Test package marker.

Test modules in different directories are imported by basename, so basenames
must stay unique across the tree.
"""
