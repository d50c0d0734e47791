# JobBoard - Job Board Backend
"""
JobBoard - Job board backend for applications and candidate notifications.

Move applications through the recruiter workflow and email candidates
when their application reaches a status worth hearing about.
"""

__version__ = "1.0.0"
__author__ = "JobBoard"
__description__ = "Job board application tracking and status notifications"
