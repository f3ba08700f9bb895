"""TaskDesk: task management REST API"""
