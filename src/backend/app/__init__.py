"""
Courser 后端应用
"""
