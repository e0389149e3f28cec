# power_budget/utils/__init__.py
