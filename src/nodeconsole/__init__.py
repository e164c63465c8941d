"""nodeconsole -- Operator console for locally supervised node processes.

This package lets an operator pick one of several node processes, start
and stop it, watch its live output and send it input lines with command
completion. The console core talks to the process supervisor and the
output event stream through abstract interfaces, so the same console can
drive an in-process supervisor or a remote one over HTTP.
"""

__version__ = "0.1.0"
