"""Infrastructure adapters: database, repositories, notifications"""
