"""HTTP layer: routers, DTOs, dependencies, exception handlers"""
