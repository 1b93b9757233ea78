import logging

from django.http import HttpResponse
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import generics
from rest_framework.decorators import api_view, permission_classes
from rest_framework.exceptions import ValidationError
from rest_framework.pagination import PageNumberPagination
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from authentication.models import Branch
from authentication.permissions import IsAdminOrCashier, Permissions, require_permission
from orders.conf import pos_setting
from orders.models import Order
from orders.serializers import OrderReadSerializer
from orders.timeutils import pos_timezone, local_today
from .exports import build_transactions_csv, build_transactions_workbook, build_daybook_pdf
from .forms import ReportFilterForm, MenuAnalysisForm
from .reports import filter_orders, summarize, dashboard_overview, menu_analysis

logger = logging.getLogger(__name__)

CanViewReports = require_permission(Permissions.VIEW_REPORTS)

FILTER_PARAMETERS = [
    openapi.Parameter('start_date', openapi.IN_QUERY, description="First local day (YYYY-MM-DD)", type=openapi.TYPE_STRING),
    openapi.Parameter('end_date', openapi.IN_QUERY, description="Last local day (YYYY-MM-DD)", type=openapi.TYPE_STRING),
    openapi.Parameter('branch_id', openapi.IN_QUERY, description="Filter by branch", type=openapi.TYPE_INTEGER),
    openapi.Parameter('payment_method', openapi.IN_QUERY, description="Filter by payment method", type=openapi.TYPE_STRING),
    openapi.Parameter('status', openapi.IN_QUERY, description="Filter by order status", type=openapi.TYPE_STRING),
]


def clean_form(form):
    if not form.is_valid():
        raise ValidationError({
            field: [error['message'] for error in errors]
            for field, errors in form.errors.get_json_data().items()
        })
    return form.cleaned_data


def filter_snapshot(filters):
    return {
        'start_date': filters.get('start_date'),
        'end_date': filters.get('end_date'),
        'branch_id': filters['branch_id'].pk if filters.get('branch_id') else None,
        'payment_method': filters.get('payment_method') or None,
        'status': filters.get('status') or None,
    }


class SettingPageSizePagination(PageNumberPagination):
    page_size_setting = None

    def get_page_size(self, request):
        return pos_setting(self.page_size_setting)


class HistoryPagination(SettingPageSizePagination):
    page_size_setting = 'HISTORY_PAGE_SIZE'


class ReportPagination(SettingPageSizePagination):
    page_size_setting = 'REPORT_PAGE_SIZE'


class OrderHistoryView(generics.ListAPIView):
    """
    Transaction history of the current user's scope, voided orders flagged.
    The summary covers the whole filtered set, not only the current page.
    """
    serializer_class = OrderReadSerializer
    permission_classes = [IsAuthenticated, IsAdminOrCashier]
    pagination_class = HistoryPagination
    default_to_today = False

    def get_filters(self):
        filters = clean_form(ReportFilterForm(self.request.query_params))
        if self.default_to_today:
            today = local_today(pos_timezone())
            filters['start_date'] = filters.get('start_date') or today
            filters['end_date'] = filters.get('end_date') or today
        return filters

    def get_queryset(self):
        self.filters = self.get_filters()
        return filter_orders(self.request.user, self.filters, pos_timezone()).with_details()

    @swagger_auto_schema(manual_parameters=FILTER_PARAMETERS)
    def get(self, request, *args, **kwargs):
        return super().get(request, *args, **kwargs)

    def list(self, request, *args, **kwargs):
        queryset = self.get_queryset()
        page = self.paginate_queryset(queryset)
        response = self.get_paginated_response(self.get_serializer(page, many=True).data)

        response.data['summary'] = summarize(queryset)
        response.data['filters'] = filter_snapshot(self.filters)
        return response


class TransactionReportView(OrderHistoryView):
    """Admin transaction report, defaulting to today's orders"""
    permission_classes = [IsAuthenticated, CanViewReports]
    pagination_class = ReportPagination
    default_to_today = True

    def list(self, request, *args, **kwargs):
        response = super().list(request, *args, **kwargs)
        response.data['branches'] = list(Branch.objects.order_by('name').values('id', 'name'))
        response.data['payment_methods'] = [
            {'value': value, 'label': str(label)} for value, label in Order.PAYMENT_METHOD_CHOICES
        ]
        return response


EXPORT_FORMATS = {
    'csv': ('text/csv; charset=utf-8', 'csv'),
    'xlsx': ('application/vnd.openxmlformats-officedocument.spreadsheetml.sheet', 'xlsx'),
    'pdf': ('application/pdf', 'pdf'),
}


@swagger_auto_schema(
    method='get',
    operation_description="Download the filtered transactions as CSV, XLSX or a PDF day book",
    manual_parameters=FILTER_PARAMETERS + [
        openapi.Parameter('file_format', openapi.IN_QUERY, type=openapi.TYPE_STRING, enum=list(EXPORT_FORMATS)),
    ],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, CanViewReports])
def export_transactions(request):
    tz = pos_timezone()
    export_format = request.query_params.get('file_format', 'csv')
    if export_format not in EXPORT_FORMATS:
        raise ValidationError({'file_format': [f"Choose one of: {', '.join(EXPORT_FORMATS)}."]})

    filters = clean_form(ReportFilterForm(request.query_params))
    today = local_today(tz)
    filters['start_date'] = filters.get('start_date') or today
    filters['end_date'] = filters.get('end_date') or today

    orders = filter_orders(request.user, filters, tz).with_details()

    if export_format == 'csv':
        content = build_transactions_csv(orders, filters, tz)
    elif export_format == 'xlsx':
        content = build_transactions_workbook(orders, filters, tz)
    else:
        content = build_daybook_pdf(orders, filters, tz)

    content_type, extension = EXPORT_FORMATS[export_format]
    filename = f"transactions_{filters['start_date']}_{filters['end_date']}.{extension}"

    logger.info(
        "Transactions exported",
        extra={'user_id': request.user.id, 'format': export_format, 'filters': filter_snapshot(filters)},
    )

    response = HttpResponse(content, content_type=content_type)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    response['Cache-Control'] = 'no-cache, must-revalidate'
    return response


@swagger_auto_schema(method='get', operation_description="Today's overview for the current user's scope")
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminOrCashier])
def dashboard(request):
    return Response(dashboard_overview(request.user, pos_timezone()))


@swagger_auto_schema(
    method='get',
    operation_description="Menu sales analysis for a named date range",
    manual_parameters=[
        openapi.Parameter('date_range', openapi.IN_QUERY, type=openapi.TYPE_STRING,
                          description="today, yesterday, this_week, last_week, this_month, last_month, this_year"),
        openapi.Parameter('branch_id', openapi.IN_QUERY, type=openapi.TYPE_INTEGER),
    ],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, CanViewReports])
def menu_analysis_report(request):
    filters = clean_form(MenuAnalysisForm(request.query_params))

    data = menu_analysis(request.user, filters['date_range'], filters.get('branch_id'), pos_timezone())
    data['filters'] = {
        'date_range': filters['date_range'],
        'branch_id': filters['branch_id'].pk if filters.get('branch_id') else None,
    }
    data['branches'] = list(Branch.objects.order_by('name').values('id', 'name'))
    return Response(data)
