"""Reference extraction and action orchestration.

Key Components:
    - ReferenceExtractor: finds Asana task links after a trigger phrase
    - ActionOrchestrator: one routine per action family
    - TaskResolver: name lookup used before creating a task
    - Dispatcher: maps an action identifier to its routine

Example:
    >>> from asana_sync.engine.dispatcher import Dispatcher
    >>> result = await Dispatcher(orchestrator).dispatch(request)
"""
