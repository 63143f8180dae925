"""
APS nodes.

- ApsDataManagement: list hubs, projects, top folders, folder contents
  and item versions
"""

from .aps_data_management import ApsDataManagementNode

__all__ = ["ApsDataManagementNode"]
