"""Qt bridges between the PocketDesk window and the engine.

`call_runner` runs feature gateway calls on a worker QThread and hands each
outcome back to the thread that owns the stores. Upload byte counts travel the
same way through `ProgressRelay`.
"""
