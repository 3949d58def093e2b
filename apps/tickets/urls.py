from django.urls import path, include
from rest_framework.routers import DefaultRouter
from . import views

app_name = 'tickets'

router = DefaultRouter()
router.register(r'tickets', views.TicketViewSet, basename='ticket')

urlpatterns = [
    # Ticket ViewSet routes
    # GET    /api/tickets/                          - Today's tickets (filterable)
    # POST   /api/tickets/                          - Issue ticket
    # GET    /api/tickets/{id}/                     - Ticket details
    # PATCH  /api/tickets/{id}/                     - Update ticket
    # DELETE /api/tickets/{id}/                     - Delete ticket (admin)

    # Custom ticket actions
    # GET    /api/tickets/{id}/extra-time/          - Extra time entries
    # POST   /api/tickets/{id}/extra-time/          - Add extra time
    # POST   /api/tickets/{id}/refund/              - Full refund
    # POST   /api/tickets/{id}/partial-refund/      - Refund some players
    # POST   /api/tickets/{id}/player-status/       - Played / waiting counts
    # POST   /api/tickets/{id}/print/               - Mark printed
    # GET    /api/tickets/{id}/qr/                  - QR code
    # GET    /api/tickets/{id}/receipt/             - Receipt data
    # GET    /api/tickets/{id}/window/              - Session window
    # GET    /api/tickets/lookup/{identifier}/      - Find by number, ID or phone
    # GET    /api/tickets/stats/                    - Statistics
    # GET    /api/tickets/extra-time/report/        - Extra time report
    # POST   /api/tickets/deactivate-expired/       - Expiry sweep (admin)

    # QR scanning
    path('qr/scan/', views.scan_qr, name='qr-scan'),
    path('qr/history/', views.scan_history_list, name='qr-history'),

    path('', include(router.urls)),
]
