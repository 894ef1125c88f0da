# Services package init
"""
JobBoard Backend - Services Layer
==================================

Service Inventory:
    - BackendService (abstract): auth + table operations of a hosted provider
    - SupabaseService: concrete implementation over the Supabase REST APIs
    - error_translation: provider failures → friendly, classified errors
    - JobService / UserService: domain handlers for listings and moderation
    - AccountService: sign-up, sign-in, admin bootstrap, password helpers

Services never see HTTP requests. Routes pass in the backend held on
app.state, which lets tests swap in a mock.
"""
