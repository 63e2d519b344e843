"""Voice conversation relay between browser clients and a live speech model."""
