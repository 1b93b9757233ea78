from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from django.utils.translation import gettext as _
from drf_yasg import openapi
from drf_yasg.utils import swagger_auto_schema
from rest_framework import status, generics
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from authentication.permissions import IsAdminOrCashier, Permissions, require_permission
from inventory.models import Category, Menu
from inventory.serializers import CategorySerializer, MenuListSerializer
from . import services
from .conf import pos_setting
from .models import Order
from .receipts import build_receipt, render_receipt_pdf
from .scope import visible_orders
from .serializers import (
    CheckoutSerializer, OrderEditSerializer, VoidOrderSerializer, OrderReadSerializer,
)


def _visible_order(user, pk):
    return get_object_or_404(visible_orders(user).with_details(), pk=pk)


@swagger_auto_schema(
    method='get',
    operation_description="Menus and categories for the order screen",
    responses={200: openapi.Response(description="Catalog for the point of sale")},
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminOrCashier])
def pos_data(request):
    """Catalog shown on the order screen"""
    menus = Menu.objects.select_related('category').order_by('name')
    categories = Category.objects.order_by('name')

    return Response({
        'menus': MenuListSerializer(menus, many=True).data,
        'categories': CategorySerializer(categories, many=True).data,
        'tax_rate': pos_setting('TAX_RATE'),
        'branch_id': request.user.branch_id,
    })


class CheckoutView(APIView):
    """Record a new order"""
    permission_classes = [IsAuthenticated, require_permission(Permissions.MANAGE_POS)]

    @swagger_auto_schema(
        operation_description="Create an order with its items. Amounts are checked against the items.",
        request_body=openapi.Schema(
            type=openapi.TYPE_OBJECT,
            required=['items', 'subtotal', 'tax', 'total'],
            properties={
                'items': openapi.Schema(
                    type=openapi.TYPE_ARRAY,
                    items=openapi.Schema(
                        type=openapi.TYPE_OBJECT,
                        required=['quantity'],
                        properties={
                            'menu_id': openapi.Schema(type=openapi.TYPE_INTEGER, description='Catalog items'),
                            'is_custom': openapi.Schema(type=openapi.TYPE_BOOLEAN, default=False),
                            'name': openapi.Schema(type=openapi.TYPE_STRING, description='Custom items'),
                            'price': openapi.Schema(type=openapi.TYPE_NUMBER, description='Custom items'),
                            'quantity': openapi.Schema(type=openapi.TYPE_INTEGER, minimum=1),
                            'note': openapi.Schema(type=openapi.TYPE_STRING),
                        }
                    )
                ),
                'subtotal': openapi.Schema(type=openapi.TYPE_NUMBER),
                'tax': openapi.Schema(type=openapi.TYPE_NUMBER),
                'total': openapi.Schema(type=openapi.TYPE_NUMBER),
                'payment_method': openapi.Schema(
                    type=openapi.TYPE_STRING,
                    enum=[value for value, _label in Order.PAYMENT_METHOD_CHOICES],
                ),
                'cash_amount': openapi.Schema(type=openapi.TYPE_NUMBER),
                'change_amount': openapi.Schema(type=openapi.TYPE_NUMBER),
                'notes': openapi.Schema(type=openapi.TYPE_STRING),
                'branch_id': openapi.Schema(type=openapi.TYPE_INTEGER, description='Required for admins'),
                'status': openapi.Schema(type=openapi.TYPE_STRING, enum=['pending', 'success']),
            }
        ),
        responses={201: OrderReadSerializer, 422: 'Validation or business rule error'}
    )
    def post(self, request, *args, **kwargs):
        serializer = CheckoutSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = services.checkout(request.user, serializer.validated_data)

        order = Order.objects.with_details().get(pk=order.pk)
        return Response({
            'success': True,
            'message': _('Order saved'),
            'order': OrderReadSerializer(order).data,
        }, status=status.HTTP_201_CREATED)


class OrderDetailView(generics.RetrieveAPIView):
    """Retrieve an order visible to the current user, voided ones included"""
    serializer_class = OrderReadSerializer
    permission_classes = [IsAuthenticated, IsAdminOrCashier]

    def get_queryset(self):
        return visible_orders(self.request.user).with_details()


@swagger_auto_schema(
    method='put',
    operation_description="Replace the items of an order. Items left out are removed.",
    request_body=OrderEditSerializer,
    responses={
        200: OrderReadSerializer,
        404: openapi.Response(description="Order not found"),
        422: openapi.Response(description="Invalid item or voided order"),
    }
)
@api_view(['PUT'])
@permission_classes([IsAuthenticated, require_permission(Permissions.EDIT_ORDERS)])
def edit_order(request, pk):
    order = _visible_order(request.user, pk)

    serializer = OrderEditSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    order = services.edit_order_items(
        order,
        request.user,
        serializer.validated_data['items'],
        serializer.validated_data['edit_reason'],
    )

    order = Order.all_objects.with_details().get(pk=order.pk)
    return Response({
        'success': True,
        'message': _('Order items updated'),
        'order': OrderReadSerializer(order).data,
    })


@swagger_auto_schema(
    method='post',
    operation_description="Void a successful order and give tracked stock back",
    request_body=VoidOrderSerializer,
    responses={
        200: OrderReadSerializer,
        403: openapi.Response(description="Cashier outside their branch or day"),
        422: openapi.Response(description="Already voided or not voidable"),
    }
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, require_permission(Permissions.VOID_ORDERS)])
def void_order(request, pk):
    # Branch and day limits are enforced by the service, so no visibility filter here
    order = get_object_or_404(Order.all_objects, pk=pk)

    serializer = VoidOrderSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    order = services.void_order(order, request.user, serializer.validated_data['delete_reason'])

    order = Order.all_objects.with_details().get(pk=order.pk)
    return Response({
        'success': True,
        'message': _('Order voided'),
        'order': OrderReadSerializer(order).data,
    })


@swagger_auto_schema(
    method='delete',
    operation_description="Permanently delete a pending order",
    responses={
        200: openapi.Response(description="Order deleted"),
        403: openapi.Response(description="Order of another branch"),
        422: openapi.Response(description="Order is not pending"),
    }
)
@api_view(['DELETE'])
@permission_classes([IsAuthenticated, require_permission(Permissions.MANAGE_POS)])
def purge_order(request, pk):
    order = get_object_or_404(Order.all_objects, pk=pk)
    order_number = services.purge_pending_order(order, request.user)

    return Response({
        'success': True,
        'message': _('Pending order %(number)s deleted') % {'number': order_number},
    })


@swagger_auto_schema(
    method='get',
    operation_description="Receipt data for an order",
    responses={
        200: openapi.Response(description="Receipt data"),
        404: openapi.Response(description="Order not found"),
    }
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminOrCashier])
def get_receipt(request, pk):
    order = _visible_order(request.user, pk)
    return Response(build_receipt(order))


@api_view(['GET'])
@permission_classes([IsAuthenticated, IsAdminOrCashier])
def get_receipt_pdf(request, pk):
    order = _visible_order(request.user, pk)

    response = HttpResponse(render_receipt_pdf(order), content_type='application/pdf')
    response['Content-Disposition'] = f'inline; filename="{order.order_number}.pdf"'
    return response
