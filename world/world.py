"""
world.py

Simulated space in front of the depth sensor.

Holds the scripted subjects and the simulation clock, and reports the bodies
present at the current time. Used in place of a physical sensor for demos
and tests.

All spatial quantities are in meters.
All time quantities are in seconds.
"""

from typing import List, Protocol, Tuple, Optional, runtime_checkable

from contracts.skeleton import SkeletonRecord


@runtime_checkable
class SubjectModel(Protocol):
    """
    Protocol for a simulated subject.

    Subjects are expected to:
    - Advance their internal state when stepped forward in time
    - Report their current body, or None when out of view
    """

    def step(self, dt: float) -> None:
        """
        Advance the subject's internal state by dt seconds.

        Parameters
        ----------
        dt : float
            Time increment in seconds. Must be non-negative.
        """
        ...

    def skeleton(self) -> Optional[SkeletonRecord]:
        """
        Body as seen by the sensor at the current time.

        Returns
        -------
        Optional[SkeletonRecord]
            The body record, or None if the subject is not visible.
        """
        ...


class World:
    """
    Simulated space containing scripted subjects.

    Attributes
    ----------
    time : float
        Current simulation time in seconds. Advances monotonically.

    Invariants
    ----------
    - Subjects are reported in insertion order
    - Behavior is deterministic given the scripts
    """

    def __init__(self, initial_time: float = 0.0) -> None:
        """
        Initialize the world.

        Parameters
        ----------
        initial_time : float, optional
            Starting simulation time in seconds. Defaults to 0.0.
        """
        self._time: float = initial_time
        self._subjects: List[SubjectModel] = []

    @property
    def time(self) -> float:
        """Current simulation time in seconds."""
        return self._time

    @property
    def subject_count(self) -> int:
        """Number of subjects in the world."""
        return len(self._subjects)

    def add_subject(self, subject: SubjectModel) -> None:
        """
        Add a subject to the world.

        Raises
        ------
        TypeError
            If the subject does not implement the SubjectModel protocol.
        """
        if not isinstance(subject, SubjectModel):
            raise TypeError(
                f"Subject must implement SubjectModel protocol. "
                f"Got {type(subject).__name__}."
            )
        self._subjects.append(subject)

    def clear(self) -> None:
        """Remove all subjects."""
        self._subjects.clear()

    def step(self, dt: float) -> None:
        """
        Advance the world and every subject by dt seconds.

        Raises
        ------
        ValueError
            If dt is negative.
        """
        if dt < 0.0:
            raise ValueError(f"Time step must be non-negative. Got dt={dt}.")
        for subject in self._subjects:
            subject.step(dt)
        self._time += dt

    def visible_skeletons(self) -> Tuple[SkeletonRecord, ...]:
        """Bodies currently in view, in insertion order."""
        bodies = (s.skeleton() for s in self._subjects)
        return tuple(b for b in bodies if b is not None)
