"""
Task subsystem.

Components:
- task_models.py: data structures (Task, PaginationMeta, StatusCounts, TaskFormDraft)
- fetch_scheduler.py: debounced, cancellable fetch timer
- reconciler.py: sequence-numbered application of fetch results
- validation.py: task form validation
- task_editor.py: create/edit form lifecycle and submission
- view_helpers.py: status/priority presentation and text rendering
"""
