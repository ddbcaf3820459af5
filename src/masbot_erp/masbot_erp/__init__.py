"""Masbot ERP package.

This package is organized by feature modules (access, employees, leaves,
supply_chain, inventory, tasks, attendance, reports, payroll) with a thin
Flask controller layer over service/repository layers.
"""
