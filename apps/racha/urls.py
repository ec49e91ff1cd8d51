from django.urls import path
from . import views

app_name = 'racha'

urlpatterns = [
    # GET/POST /api/racha/events/{event_id}/participants/                     - List / add
    # DELETE   /api/racha/events/{event_id}/participants/{participant_id}/    - Remove
    path('events/<uuid:event_id>/participants/', views.participants, name='participants'),
    path(
        'events/<uuid:event_id>/participants/<uuid:participant_id>/',
        views.remove_participant,
        name='participant-remove'
    ),

    # GET/POST /api/racha/events/{event_id}/expenses/    - List / record
    # GET      /api/racha/events/{event_id}/settlement/  - Balances
    path('events/<uuid:event_id>/expenses/', views.expenses, name='expenses'),
    path('events/<uuid:event_id>/settlement/', views.settlement, name='settlement'),

    # POST /api/racha/events/{event_id}/payments/          - Record payment
    # GET  /api/racha/events/{event_id}/payments/summary/  - Paid totals
    # GET  /api/racha/events/{event_id}/payments/details/  - What to pay and to whom
    path('events/<uuid:event_id>/payments/', views.payments, name='payments'),
    path('events/<uuid:event_id>/payments/summary/', views.payments_summary, name='payments-summary'),
    path('events/<uuid:event_id>/payments/details/', views.payment_details, name='payment-details'),

    # Invites
    path('join/<str:invite_slug>/', views.join_by_invite, name='join'),
    path('participants/<uuid:participant_id>/claim/', views.claim, name='claim'),

    # Provider notifications
    path('payments/notifications/', views.payment_notification, name='payment-notification'),
]
