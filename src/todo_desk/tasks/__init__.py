"""
Task subsystem.

Components:
- task_models.py: the Task record
- task_codec.py: versioned JSON encoding of the task list
- task_store.py: in-memory list + whole-file persistence, failure policy
"""
