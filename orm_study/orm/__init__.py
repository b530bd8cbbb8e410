"""
This orm module contains the ORM (Object-Relational Mapping) models of orm-study.
It contains the declarative schema, search values, repositories, Unit of Work
patterns, services and database connection utilities.
"""
