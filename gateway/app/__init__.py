"""
Marketplace Gateway Application
===============================

Presentation-side API layer for the service marketplace. Most endpoints
forward to the backend API through a declarative route table; a few
(uploads, verification codes, reset-token checks) are answered here.

Packages:
    - proxy:        route table and the generic forwarder
    - auth:         locally verified tokens
    - verification: expiring verification-code store and routes
    - uploads:      image, document and profile-picture uploads
"""
