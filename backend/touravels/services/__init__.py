# Services package init
"""
TourAvels Backend — Services Layer
===================================

What:  The layer between routes (HTTP) and the store (MongoDB).

Service Inventory:
    - RecordService: list/get/create/update/delete over one collection
      (instances: spot_service, plan_service)
"""
