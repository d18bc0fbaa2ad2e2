"""Input/output module.

Events are provided to the driver as already materialized records, hence
this module only takes care of writing the analysis outputs to file.
"""

from .write import CSVWriter
