"""precool-sim: forced-air produce cooling simulation framework.

Models transient heat and moisture exchange in a multi-zone container of
palletized perishable produce cooled by a feedback-controlled cooling unit.
"""

__version__ = "0.1.0"
