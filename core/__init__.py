"""core/ -- Configuration and result types shared by every other layer.

Layer rule: core/ is the kernel. It does NOT import from api/, auth/, or posts/.
"""
