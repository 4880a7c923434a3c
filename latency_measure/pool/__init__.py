from .result_tables import ResultTables, sort_rows, row_sort_key
from .worker_pool import MeasureWorkerPool

__all__ = ["ResultTables", "sort_rows", "row_sort_key", "MeasureWorkerPool"]
