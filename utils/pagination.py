from flask import request, current_app

class Pagination:
    def __init__(self, items, page, per_page, total, pages):
        self.items = items
        self.page = page
        self.per_page = per_page
        self.total = total
        self.pages = pages
        self.has_next = page < pages
        self.has_prev = page > 1

def paginate(query, page=None, per_page=None, default_page=1, max_per_page=100):
    """
    Paginate a SQLAlchemy query

    Args:
        query: SQLAlchemy query to paginate
        page: Page number (1-indexed)
        per_page: Items per page
        default_page: Default page if none provided
        max_per_page: Maximum items per page allowed

    Returns:
        Pagination object with items, page, per_page, total and pages
    """
    default_per_page = current_app.config.get('ITEMS_PER_PAGE', 20)

    # Get pagination parameters from request if not provided
    if page is None:
        page = request.args.get('page', default_page, type=int)
    if per_page is None:
        per_page = request.args.get('per_page', default_per_page, type=int)

    # Validate pagination parameters
    page = max(1, page)
    per_page = min(max(1, per_page), max_per_page)

    total = query.count()
    pages = (total + per_page - 1) // per_page if per_page > 0 else 0

    items = query.limit(per_page).offset((page - 1) * per_page).all()

    return Pagination(items, page, per_page, total, pages)
