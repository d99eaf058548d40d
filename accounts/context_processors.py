def session_store(request):
    store = getattr(request, "store", None)
    if store is None:
        return {}

    return {
        "current_user": store.user,
        "school_name": store.school_name,
    }
