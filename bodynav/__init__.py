"""
Body-gesture flight navigation.

Turns skeletal pose frames into navigation key presses for a 3D viewer.
"""

__version__ = "1.0.0"
