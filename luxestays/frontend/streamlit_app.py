"""Streamlit frontend for LuxeStays."""
import streamlit as st
import pandas as pd
import requests
from datetime import date, timedelta
from typing import Any, Dict, Optional
import os
import time
from luxestays.frontend.payment_view import (
    ABANDONED,
    AWAITING_BOOKING,
    CONFIRMED,
    EXPIRED,
    PENDING,
    can_check,
    countdown_running,
    payment_stage,
    pop_flash,
    push_flash,
)

st.set_page_config(
    page_title="LuxeStays",
    page_icon="🌴",
    layout="wide"
)

# API base URL - can be set via environment variable or Streamlit secrets
API_BASE_URL = os.getenv("API_BASE_URL")
if not API_BASE_URL:
    try:
        API_BASE_URL = st.secrets.get("API_BASE_URL", "http://localhost:8000/api")
    except (AttributeError, FileNotFoundError, KeyError):
        API_BASE_URL = "http://localhost:8000/api"

AMENITIES = [
    "Guided Treks", "Campfire", "Kerala Cuisine", "Wi-Fi", "Bonfire", "Scenic Views",
    "Boating", "Nature Walks", "Backwater Cruise", "Pool", "Spa", "Beach Access", "Ayurvedic Spa",
]

SORT_LABELS = {
    "rating_desc": "Rating: High to Low",
    "price_asc": "Price: Low to High",
    "price_desc": "Price: High to Low",
    "popularity": "Popularity",
}

st.title("🌴 LuxeStays")
st.sidebar.title("Navigation")

user_id = st.sidebar.text_input("Signed in as (user ID)", value=st.session_state.get("user_id", ""))
st.session_state["user_id"] = user_id

page = st.sidebar.selectbox(
    "Choose a page",
    [
        "Our Resorts",
        "Book a Stay",
        "Payment",
        "My Bookings",
        "Contact Us"
    ]
)


def api_request(method: str, endpoint: str, data: Optional[Dict[str, Any]] = None, params: Optional[Dict[str, Any]] = None) -> Optional[Any]:
    """Make API request."""
    url = f"{API_BASE_URL}{endpoint}"
    headers = {"X-User-Id": user_id} if user_id else {}
    try:
        response = requests.request(method, url, json=data, params=params, headers=headers, timeout=30)
        response.raise_for_status()
        return response.json() if response.content else None
    except requests.exceptions.HTTPError as e:
        detail = e.response.json().get("detail", str(e)) if e.response is not None and e.response.content else str(e)
        st.error(f"{detail}")
        return None
    except requests.exceptions.RequestException as e:
        st.error(f"API request failed: {str(e)}")
        return None


def show_notifications(notifications) -> None:
    """Render notifications collected by the payment flow."""
    for note in notifications or []:
        message = f"**{note['title']}** {note.get('detail', '')}"
        if note["kind"] == "success":
            st.success(message)
        elif note["kind"] == "error":
            st.error(message)
        elif note["kind"] == "warning":
            st.warning(message)
        else:
            st.info(message)


# Page: Our Resorts
if page == "Our Resorts":
    st.header("Explore Kerala's Finest Resorts")
    
    with st.sidebar:
        st.subheader("Filters")
        term = st.text_input("Search by name or location")
        price_range = st.slider("Price per night (₹)", 0, 50000, (500, 20000), step=500)
        guests = st.number_input("Guests", min_value=1, max_value=20, value=1)
        amenities = st.multiselect("Amenities", AMENITIES)
        sort = st.selectbox("Sort by", list(SORT_LABELS), format_func=SORT_LABELS.get)
    
    params = {
        "term": term,
        "min_price": price_range[0],
        "max_price": price_range[1],
        "min_guests": guests,
        "amenities": amenities,
        "sort": sort,
    }
    resorts = api_request("GET", "/resorts", params=params) or []
    
    if not resorts:
        st.info("No resorts match your filters")
    
    for resort in resorts:
        with st.container(border=True):
            col1, col2 = st.columns([3, 1])
            with col1:
                st.subheader(resort["name"])
                st.caption(resort["location"])
                st.write(resort.get("description") or "")
                if resort.get("amenities"):
                    st.write(" · ".join(resort["amenities"]))
            with col2:
                st.metric("From", f"₹{(resort.get('price_per_night') or 0):,.0f}")
                st.metric("Rating", f"{resort.get('rating') or 0:.1f} ★")
                if st.button("Book", key=f"book_{resort['id']}"):
                    st.session_state["resort_id"] = resort["id"]
                    st.success("Resort selected. Open 'Book a Stay' to continue.")


# Page: Book a Stay
elif page == "Book a Stay":
    st.header("Book a Stay")
    
    resort_id = st.session_state.get("resort_id")
    if not resort_id:
        st.info("Select a resort on the 'Our Resorts' page first")
    else:
        resort = api_request("GET", f"/resorts/{resort_id}")
        if resort:
            st.subheader(resort["name"])
            options = [so for so in resort.get("stay_options", []) if so["availability_status"] != "booked_out"]
            
            if not options:
                st.warning("No stay options are currently available")
            else:
                df = pd.DataFrame([
                    {
                        "Option": so["name"],
                        "Price (₹)": so["price"],
                        "Pricing": "Per Person" if so["pricing_model"] == "per_person" else "Fixed Price",
                        "Capacity": so["capacity"],
                        "Availability": so["availability_status"],
                    }
                    for so in options
                ])
                st.dataframe(df, use_container_width=True)
                
                with st.form("quote_form"):
                    option = st.selectbox("Stay option", options, format_func=lambda so: so["name"])
                    col1, col2 = st.columns(2)
                    with col1:
                        check_in = st.date_input("Check-in", value=date.today())
                    with col2:
                        check_out = st.date_input("Check-out", value=date.today() + timedelta(days=2))
                    guest_count = st.number_input("Guests", min_value=1, max_value=20, value=2)
                    guest_name = st.text_input("Full name")
                    guest_email = st.text_input("Email")
                    
                    quote_clicked = st.form_submit_button("Get Quote")
                    pay_clicked = st.form_submit_button("Proceed to Payment")
                
                request = {
                    "stay_option_id": option["id"],
                    "check_in": check_in.isoformat(),
                    "check_out": check_out.isoformat(),
                    "guest_count": int(guest_count),
                }
                
                if quote_clicked:
                    quote = api_request("POST", "/quotes", request)
                    if quote:
                        st.metric("Total Amount", f"₹{quote['total_amount']:,.2f}")
                        st.caption(f"{quote['nights']} night(s) × ₹{quote['unit_price']:,.0f}")
                
                if pay_clicked:
                    if not user_id:
                        st.warning("Please sign in to complete your booking.")
                    else:
                        session = api_request("POST", "/payments", {
                            **request,
                            "guest_name": guest_name or None,
                            "guest_email": guest_email or None,
                        })
                        if session:
                            st.session_state["payment_id"] = session["id"]
                            st.session_state.pop("notifications", None)
                            st.success("Payment started. Open the 'Payment' page to pay with UPI.")


# Page: Payment
elif page == "Payment":
    st.header("Complete Payment")
    # Messages queued before the last rerun
    show_notifications(pop_flash(st.session_state))
    
    payment_id = st.session_state.get("payment_id")
    if not payment_id:
        st.info("Start a booking on the 'Book a Stay' page first")
    else:
        session = api_request("GET", f"/payments/{payment_id}")
        if session:
            quote = session["quote"]
            stage = payment_stage(session)
            st.write(f"Check-in: {quote['check_in']} · Check-out: {quote['check_out']} · Guests: {quote['guest_count']}")
            st.metric("Total Amount", f"₹{quote['total_amount']:,.2f}")
            # Notifications are drained on read; keep the latest batch across countdown reruns
            if session.get("notifications"):
                st.session_state["notifications"] = session["notifications"]
            show_notifications(st.session_state.get("notifications"))
            
            if countdown_running(stage):
                st.write(f"⏱ Time left: **{session['time_left']}**")
                st.link_button("Pay Now with UPI", session["upi_link"])
                st.code(session["upi_link"])
            
            if stage == AWAITING_BOOKING:
                st.warning("Payment received, but your booking is not saved yet. Check again to retry.")
            
            if can_check(stage):
                col1, col2 = st.columns(2)
                with col1:
                    label = "Check Payment Status" if stage == PENDING else "Retry Booking"
                    if st.button(label):
                        outcome = api_request("POST", f"/payments/{payment_id}/check")
                        if outcome and outcome.get("booking_id"):
                            st.session_state["celebrate"] = True
                        st.rerun()
                with col2:
                    if stage == PENDING and st.button("Cancel"):
                        api_request("DELETE", f"/payments/{payment_id}")
                        st.session_state.pop("payment_id", None)
                        st.session_state.pop("notifications", None)
                        push_flash(st.session_state, "info", "Payment cancelled")
                        st.rerun()
            
            if countdown_running(stage):
                # Refresh the countdown once a second
                time.sleep(1)
                st.rerun()
            elif stage == CONFIRMED:
                if st.session_state.pop("celebrate", False):
                    st.balloons()
                st.success(f"Booking confirmed: {session['booking_id']}")
            elif stage == EXPIRED:
                st.error("Payment Time Expired. Please try booking again.")
                st.session_state.pop("payment_id", None)
            elif stage == ABANDONED:
                st.info("This payment was cancelled. Start a new booking to try again.")
                st.session_state.pop("payment_id", None)


# Page: My Bookings
elif page == "My Bookings":
    st.header("My Bookings")
    
    if not user_id:
        st.info("Sign in to see your bookings")
    else:
        bookings = api_request("GET", "/bookings") or []
        if bookings:
            df = pd.DataFrame([
                {
                    "Booking": b["id"],
                    "Check-in": b["check_in_date"],
                    "Check-out": b["check_out_date"],
                    "Guests": b["guest_count"],
                    "Total (₹)": b["total_amount"],
                    "Status": b["status"],
                    "Payment": b["payment_status"],
                }
                for b in bookings
            ])
            st.dataframe(df, use_container_width=True)
        else:
            st.info("No bookings yet")


# Page: Contact Us
elif page == "Contact Us":
    st.header("Contact Us")
    show_notifications(pop_flash(st.session_state))
    
    info = api_request("GET", "/website-settings") or {}
    col1, col2 = st.columns(2)
    with col1:
        st.subheader("Get in touch")
        for label, key in (("Address", "company_address"), ("Phone", "company_phone"), ("Email", "company_email")):
            if info.get(key):
                st.write(f"**{label}:** {info[key]}")
        links = [
            f"[{name}]({info[key]})"
            for name, key in (("Facebook", "facebook_url"), ("Instagram", "instagram_url"),
                              ("Twitter", "twitter_url"), ("LinkedIn", "linkedin_url"))
            if info.get(key)
        ]
        if links:
            st.markdown(" · ".join(links))
    
    with col2:
        with st.form("contact_form", clear_on_submit=True):
            name = st.text_input("Name")
            email = st.text_input("Email")
            subject = st.text_input("Subject")
            message = st.text_area("Message")
            sent = st.form_submit_button("Send Message")
        
        if sent:
            if not all(value.strip() for value in (name, email, subject, message)):
                st.warning("Please fill in all required fields")
            elif api_request("POST", "/contact-messages", {
                "name": name, "email": email, "subject": subject, "message": message
            }):
                push_flash(st.session_state, "success", "Message sent!", "We'll get back to you soon.")
                st.rerun()
