"""TaskManager Security Meta information.
   Password hashing, field encryption and session tokens for TaskManager.
"""
__title__ = 'taskmanager_security'
__description__ = (
   'Password hashing, field encryption and session tokens '
   'for the TaskManager backend.'
)
__version__ = '0.1.0'
__license__ = 'Apache-2.0'
