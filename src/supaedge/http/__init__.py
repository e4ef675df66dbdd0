"""HTTP primitives — Request, Response, headers, query, URL, forms."""
