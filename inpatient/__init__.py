"""
Inpatient bed allocation service.
"""
