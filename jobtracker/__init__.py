"""Personal job-application tracker backend."""
