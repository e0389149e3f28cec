# power_budget/core/__init__.py
