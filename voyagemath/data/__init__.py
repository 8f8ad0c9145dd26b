"""
Record types for passenger data.
"""

from voyagemath.data.records import ColumnDescriptor, Record, records_from_dataframe
