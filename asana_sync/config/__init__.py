"""Configuration for asana-sync.

Key Components:
    - ActionInputs: action inputs as exposed by the Actions runner
    - RunnerSettings: runner environment (event file, output file, API URLs)

Example:
    >>> from asana_sync.config.inputs import ActionInputs
    >>> inputs = ActionInputs.from_environ()
    >>> inputs.require("action")
"""
