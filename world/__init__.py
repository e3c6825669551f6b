"""
world package

Simulated space in front of the sensor, populated with scripted subjects.
"""

from world.world import World, SubjectModel
from world.subjects import ScriptedSubject, Segment, POSES

__all__ = ["World", "SubjectModel", "ScriptedSubject", "Segment", "POSES"]
