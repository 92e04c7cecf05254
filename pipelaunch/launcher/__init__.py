"""Browser launching over debugging pipes.

The launcher lives in :mod:`pipelaunch.launcher.pipe_launcher`; this package
stays import-light because the configuration layer imports its flags.
"""
