"""
Paytrack Modules.

Orchestration layers over the kernel and the pure engines.  Each module
contains domain models (the nouns), workflows (state machines), a
configuration schema, ORM persistence models and a service facade.

Modules:
- Payroll: pay guides, shifts, pay periods, withholding
"""
