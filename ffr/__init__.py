"""ffr - batch file renaming and video re-encoding toolbox."""
