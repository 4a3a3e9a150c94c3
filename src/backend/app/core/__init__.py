"""
核心配置：数据库、路径、日志、认证
"""
