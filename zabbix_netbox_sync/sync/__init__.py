"""Pipeline orchestration and the command line interface."""
