"""Reference campaign driving the target surface and invariant catalog.

Implements stateful sequence fuzzing with:
  - Random target sequences mixing boundary and wide-range values
  - Catalog checks after every N calls
  - Delta-debugging minimization of violating traces
"""
