"""SafeMongo — detect unsafe MongoDB query patterns in JavaScript / TypeScript."""

__version__ = "0.1.0"
