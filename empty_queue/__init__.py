"""Empty Queue: deep/admin work blocks and task scheduling."""
