"""
Stablebook algorithms package.

Pure scheduling computations used by the facility reservation services. Code
in this package never touches the database; callers pass in snapshots.

- availability: Time block resolution, conflict detection, capacity sweep and
  slot generation
"""

__version__ = "1.0.0"
