"""
Effort Estimator Service.

This service is responsible for:
- Parsing git numstat logs into commit records
- Estimating human effort in hours per commit
- Aggregating estimates per developer and per repository
"""

__version__ = "1.0.0"
__author__ = "Commit Effort Estimator Team"
__description__ = "Heuristic commit effort estimation service"
