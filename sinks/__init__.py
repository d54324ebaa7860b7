"""
Output sinks: the Excel report writer and the email notifier.
"""
