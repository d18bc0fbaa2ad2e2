"""Writers used to persist the analysis outputs."""

from .csv import CSVWriter
