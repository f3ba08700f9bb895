"""Application services: task lifecycle and user accounts"""
