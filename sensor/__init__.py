"""
sensor package

Frame sources standing in for the depth-sensor driver.
"""

from sensor.synthetic_skeleton import SyntheticSkeletonSource

__all__ = ["SyntheticSkeletonSource"]
