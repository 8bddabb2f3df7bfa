"""Run multiple-choice exams fetched from a remote quiz generator."""
