"""Example schemas describing a content-addressed repository: actions, commits and artefacts."""
