"""
Workflow email notifications. No models; not an installed app.
"""
